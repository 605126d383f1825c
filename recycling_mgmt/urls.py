# recycling_mgmt/urls.py
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def healthz(request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path('admin/', admin.site.urls),
    # Computation layer over the CRUD backend
    path('api/', include('recycling.api_urls')),
    # Finance (cash management)
    path('cash/', include('cash_management.urls')),
    path("healthz/", healthz),
]
