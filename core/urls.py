from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    path('procedures/<slug:name>/', views.procedure_call, name='procedure_call'),
]
