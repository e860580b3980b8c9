"""
PATH: sales/api/views/crm.py

CRM API

GET/POST /api/sales/customers/?search=
GET/POST /api/sales/leads/?status=&source=&search=
POST     /api/sales/leads/<id>/status/     {"status": "CONTACTED"}
POST     /api/sales/leads/<id>/convert/    -> Customer
GET      /api/sales/leads/pipeline/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from sales.api.serializers import (
    CustomerSerializer,
    LeadConvertSerializer,
    LeadCreateSerializer,
    LeadSerializer,
    LeadStatusSerializer,
    PipelineSerializer,
)
from sales.api.views.base import SalesAPIView
from sales.services import crm_service


def _query(request, name):
    value = (request.query_params.get(name) or "").strip()
    return value or None


class CustomerListCreateView(SalesAPIView):
    serializer_class = CustomerSerializer

    @extend_schema(
        tags=["sales"],
        parameters=[OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, required=False)],
        responses=CustomerSerializer(many=True),
    )
    def get(self, request):
        qs = crm_service.list_customers(tenant_id=self.tenant_id, search=_query(request, "search"))
        return Response(CustomerSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=CustomerSerializer, responses={201: CustomerSerializer})
    def post(self, request):
        s = CustomerSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        customer = crm_service.create_customer(tenant_id=self.tenant_id, **s.validated_data)
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


class LeadListCreateView(SalesAPIView):
    serializer_class = LeadCreateSerializer

    @extend_schema(
        tags=["sales"],
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="source", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses=LeadSerializer(many=True),
    )
    def get(self, request):
        qs = crm_service.list_leads(
            tenant_id=self.tenant_id,
            status=_query(request, "status"),
            source=_query(request, "source"),
            search=_query(request, "search"),
        )
        return Response(LeadSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=LeadCreateSerializer, responses={201: LeadSerializer})
    def post(self, request):
        s = LeadCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        lead = crm_service.create_lead(tenant_id=self.tenant_id, **s.validated_data)
        return Response(LeadSerializer(lead).data, status=status.HTTP_201_CREATED)


class LeadStatusView(SalesAPIView):
    serializer_class = LeadStatusSerializer

    @extend_schema(tags=["sales"], request=LeadStatusSerializer, responses=LeadSerializer)
    def post(self, request, lead_id):
        s = LeadStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        lead = crm_service.update_lead_status(
            tenant_id=self.tenant_id, lead_id=lead_id, status=s.validated_data["status"]
        )
        return Response(LeadSerializer(lead).data, status=status.HTTP_200_OK)


class LeadConvertView(SalesAPIView):
    serializer_class = LeadConvertSerializer

    @extend_schema(tags=["sales"], request=LeadConvertSerializer, responses={201: CustomerSerializer})
    def post(self, request, lead_id):
        s = LeadConvertSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        customer = crm_service.convert_lead_to_customer(
            tenant_id=self.tenant_id, lead_id=lead_id, **s.validated_data
        )
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


class LeadPipelineView(SalesAPIView):
    serializer_class = PipelineSerializer

    @extend_schema(tags=["sales"], responses=PipelineSerializer)
    def get(self, request):
        data = crm_service.lead_pipeline(tenant_id=self.tenant_id)
        return Response(PipelineSerializer(data).data, status=status.HTTP_200_OK)
