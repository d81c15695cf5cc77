from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('core.urls')),
    path('students/', include('students.urls')),
    path('gradebook/', include('gradebook.urls')),
    path('communications/', include('communications.urls')),
    path('finance/', include('finance.urls')),
    path('inventory/', include('inventory.urls')),
]
