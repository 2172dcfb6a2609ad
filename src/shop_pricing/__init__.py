"""
Shop Pricing Package

Storefront domain layer for product price calculation and customer accounts.
Resolves product prices using Product → Pricing Group → Price pipeline with
main variant aggregation.
"""

__version__ = "1.0.0"
