from django.urls import path
from . import views

app_name = 'gradebook'

urlpatterns = [
    path('records/save/', views.record_save, name='record_save'),
    path('reports/<int:student_id>/<int:year_id>/', views.student_report, name='student_report'),
    path('classes/<int:class_id>/summary/', views.class_overview, name='class_summary'),
    path('terms/<int:term_id>/lock/', views.toggle_grade_lock, name='toggle_grade_lock'),
]
