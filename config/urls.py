from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView


def health_check(request):
    return JsonResponse({'status': 'ok', 'service': 'digital-prizes'})


urlpatterns = [
    path('admin/', admin.site.urls),

    # Health check
    path('health/', health_check, name='health'),

    # API
    path('api/admin/auth/', include('accounts.urls')),
    path('api/awards/', include('awards.urls')),
    path('api/redemptions/', include('redemptions.urls')),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
