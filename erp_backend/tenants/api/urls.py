# tenants/api/urls.py

from django.urls import path

from tenants.api.views import ActiveModulesView, ModuleCheckView

urlpatterns = [
    path("active/", ActiveModulesView.as_view(), name="modules-active"),
    path("check/<str:module>/", ModuleCheckView.as_view(), name="modules-check"),
]
