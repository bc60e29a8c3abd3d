from django.urls import path
from accounts import views

urlpatterns = [
    path('login/', views.admin_login, name='admin-login'),
]
