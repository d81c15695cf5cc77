from django.urls import path
from . import views

app_name = 'finance'

urlpatterns = [
    path('entries/', views.entry_list, name='entry_list'),
    path('entries/create/', views.entry_create, name='entry_create'),
    path('entries/<int:pk>/confirm/', views.payment_confirm, name='payment_confirm'),
    path('entries/<int:pk>/reject/', views.payment_reject, name='payment_reject'),
]
