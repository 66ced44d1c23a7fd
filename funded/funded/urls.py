"""
URL configuration for the FundEd project.

The Django admin is the operator dashboard: events, students, payment
verification, print distribution and the notification log all live there.
Uploaded proofs and QR images are served from MEDIA_URL while DEBUG is on.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path

admin.site.site_header = 'FundEd'
admin.site.site_title  = 'FundEd admin'
admin.site.index_title = 'Class fund collection'

# Media first: the admin's catch-all pattern would swallow /media/ otherwise
urlpatterns = static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT) + [
    path('', admin.site.urls),
]
