"""
Storefront Models Registry

Central models registry for the storefront application. It imports and
exposes all models from the functional subpackages so they are registered
with Django's ORM under the single ``storefront`` app label.

Architecture:
- users/: account profile and active session token
- catalog/: products, ratings and reviews
- shop/: cart lines and orders
- courses/: courses, course videos and enrollments

Author: CraftHub Development Team
Version: 1.0.0
"""

# Import all user-related models for registration with Django ORM
from .users.models import *  # noqa: F401,F403

# Import all catalog models for registration with Django ORM
from .catalog.models import *  # noqa: F401,F403

# Import all shop models for registration with Django ORM
from .shop.models import *  # noqa: F401,F403

# Import all course models for registration with Django ORM
from .courses.models import *  # noqa: F401,F403
