from django.urls import path
from . import views

app_name = 'students'

urlpatterns = [
    path('enrollments/decide/', views.enrollment_decide, name='enrollment_decide'),
]
