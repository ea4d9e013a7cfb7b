"""
Payments Package - CraftHub
===========================

All Stripe-related logic of the CraftHub backend.

Scope
-----
- ``gateway.py``  → PaymentGateway: creates and verifies PaymentIntents
  (amount in minor units, currency, metadata) with the official ``stripe`` SDK.
- ``views.py``    → public config endpoint for Stripe.js (publishable key,
  currency).
- ``signals.py``  → webhook handlers reacting to ``djstripe.models.Event``
  rows (course enrollment confirmation, refunds).

The checkout/enrollment flows in ``storefront`` call the gateway directly;
dj-stripe webhooks are a second, asynchronous confirmation path.

Author: CraftHub Development Team
Version: 1.0.0
"""
