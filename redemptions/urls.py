from django.urls import path
from redemptions import views

urlpatterns = [
    path('available/', views.available_prizes, name='redemption-available'),
    path('initiate/', views.initiate_redemption, name='redemption-initiate'),
    path('complete/', views.complete_redemption, name='redemption-complete'),
    path('<int:award_id>/', views.redemption_detail, name='redemption-detail'),
]
