from django.urls import path
from awards import views

urlpatterns = [
    path('', views.award_prize, name='award-create'),
    path('bulk/', views.bulk_award, name='award-bulk'),
    path('by-phone/<str:phone>/', views.awards_by_phone, name='award-by-phone'),
    path('<int:award_id>/', views.award_detail, name='award-detail'),
    path('<int:award_id>/cancel/', views.cancel_award, name='award-cancel'),
    path('<int:award_id>/resend-notification/', views.resend_notification, name='award-resend-notification'),
]
