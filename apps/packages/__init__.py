"""Packages app package.

This app describes what a customer buys: a photobooth package with its
base price, add-ons, extras, travel fee and the discount, tax and deposit
rules that apply to it, plus the pricing engine that turns a package into
a price breakdown. Packages are immutable snapshots handed over by the
catalog; nothing here is persisted.
"""
