from django.urls import path
from . import views

app_name = 'communications'

urlpatterns = [
    path('notifications/', views.notification_list, name='notification_list'),
    path('notifications/feed/', views.notification_feed, name='notification_feed'),
    path('notifications/read-all/', views.mark_all_read, name='mark_all_read'),
    path('notifications/<int:pk>/read/', views.mark_read, name='mark_read'),
]
