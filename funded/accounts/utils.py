"""
accounts/utils.py
─────────────────
Scope helpers shared by the admin and the services.
"""

from .models import SchoolClass


def get_representative_class(user):
    """
    Return the SchoolClass this representative manages, or None if they have
    no class assigned yet or are not a representative.  Always use this to
    scope operator querysets.
    """
    if user is None or not user.is_authenticated or not user.is_representative:
        return None
    return SchoolClass.objects.filter(representative=user).first()
