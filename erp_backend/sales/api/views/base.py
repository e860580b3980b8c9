# sales/api/views/base.py

from tenants.api.views import TenantAPIView
from tenants.models import Module


class SalesAPIView(TenantAPIView):
    required_module = Module.SALES
