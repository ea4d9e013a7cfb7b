"""
CraftHub core package.

Shared services used by every storefront area: exception hierarchy, image
host client, operator messaging links, live model subscriptions and the
Stripe payments app (``core.payments``).
"""
