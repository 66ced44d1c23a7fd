"""
WSGI config for the FundEd project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'funded.settings')

application = get_wsgi_application()
