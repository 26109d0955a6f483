from django.db.models import ProtectedError, Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from apps.accounts.scoping import AccountScopedMixin, resolve_request_account
from .models import Client, Invoice
from .serializers import (
    ClientSerializer,
    InvoiceSerializer,
    InvoiceListSerializer,
    InvoiceWriteSerializer,
    InvoiceFilterSerializer,
    InvoiceStatusSerializer,
    MarkPaidSerializer,
    SendInvoiceSerializer,
    InvoiceSettingsSerializer,
    PublicInvoiceSerializer,
    NextInvoiceNumberSerializer,
)
from .services import (
    create_invoice,
    update_invoice,
    update_invoice_status,
    mark_invoice_paid,
    send_invoice_email,
    get_invoice_settings,
    preview_invoice_number,
    PaymentQRGenerator,
    InvoicePDFRenderer,
    # Exceptions
    ClientNotFoundError,
    InvalidInvoiceError,
    InvalidStatusTransitionError,
    InvoiceAlreadyPaidError,
    InvoiceEmailError,
    InvoiceNotFoundError,
    MissingBankDetailsError,
    MissingRecipientError,
)


class InvoicePagination(PageNumberPagination):
    """Custom pagination for invoices and clients."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ClientViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    ViewSet for the active account's clients.

    list: Get clients (?search= matches name or email)
    create / retrieve / update / destroy: Manage a client
    """

    queryset = Client.objects.all()
    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = InvoicePagination

    def get_queryset(self):
        queryset = super().get_queryset()
        search = self.request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(email__icontains=search))
        return queryset

    def destroy(self, request, *args, **kwargs):
        client = self.get_object()
        try:
            client.delete()
        except ProtectedError:
            return Response(
                {'error': 'Client has invoices and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class InvoiceViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    ViewSet for invoices.

    All business logic is handled by services.

    list: Get invoices (filter by status, client, date range, search)
    create: Create an invoice with items
    retrieve: Get an invoice with items
    update / partial_update: Edit an open invoice
    destroy: Delete an invoice
    status: Change status
    mark_paid: Record payment (creates an income transaction)
    send: Email the invoice to the client
    payment_qr: PNG QR code with bank transfer details
    pdf: Printable PDF download
    preview_number: Next invoice number
    """

    queryset = Invoice.objects.select_related('client', 'account').prefetch_related('items')
    permission_classes = [IsAuthenticated]
    pagination_class = InvoicePagination

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        if self.action in ['create', 'update', 'partial_update']:
            return InvoiceWriteSerializer
        return InvoiceSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = InvoiceFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'client' in params:
            queryset = queryset.filter(client_id=params['client'])
        if 'date_from' in params:
            queryset = queryset.filter(invoice_date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(invoice_date__lte=params['date_to'])

        search = params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(invoice_number__icontains=search) | Q(client__name__icontains=search)
            )
        return queryset

    def _detail_response(self, invoice, status_code=status.HTTP_200_OK):
        invoice = self.get_queryset().get(pk=invoice.pk)
        return Response(InvoiceSerializer(invoice).data, status=status_code)

    @extend_schema(request=InvoiceWriteSerializer, responses={201: InvoiceSerializer})
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = create_invoice(
                account=self.get_account(),
                user=request.user,
                **serializer.validated_data,
            )
        except (ClientNotFoundError, InvalidInvoiceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return self._detail_response(invoice, status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceWriteSerializer, responses={200: InvoiceSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        invoice = self.get_object()
        serializer = self.get_serializer(invoice, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        # Status changes go through the status action
        data.pop('status', None)

        try:
            invoice = update_invoice(invoice_id=invoice.id, account=self.get_account(), **data)
        except (ClientNotFoundError, InvalidInvoiceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return self._detail_response(invoice)

    @extend_schema(request=InvoiceStatusSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=['post'], url_path='status', url_name='status')
    def change_status(self, request, pk=None):
        """Change invoice status; paid and cancelled are final."""
        input_serializer = InvoiceStatusSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        invoice = self.get_object()
        try:
            invoice = update_invoice_status(
                invoice_id=invoice.id,
                account=self.get_account(),
                user=request.user,
                **input_serializer.validated_data,
            )
        except InvalidStatusTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return self._detail_response(invoice)

    @extend_schema(request=MarkPaidSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=['post'])
    def mark_paid(self, request, pk=None):
        """Record payment and create the matching income transaction."""
        input_serializer = MarkPaidSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        invoice = self.get_object()
        try:
            invoice = mark_invoice_paid(
                invoice_id=invoice.id,
                account=self.get_account(),
                user=request.user,
                **input_serializer.validated_data,
            )
        except (InvoiceAlreadyPaidError, InvalidStatusTransitionError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return self._detail_response(invoice)

    @extend_schema(
        request=SendInvoiceSerializer,
        responses={200: InvoiceSerializer, 502: OpenApiResponse(description='Mail server refused the email')},
    )
    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        """Email the invoice to the client or a given address."""
        input_serializer = SendInvoiceSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        invoice = self.get_object()
        try:
            invoice = send_invoice_email(
                invoice_id=invoice.id,
                account=self.get_account(),
                **input_serializer.validated_data,
            )
        except MissingRecipientError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvoiceEmailError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        return self._detail_response(invoice)

    @extend_schema(
        responses={(200, 'image/png'): OpenApiTypes.BINARY, 400: OpenApiResponse(description='No bank details')},
    )
    @action(detail=True, methods=['get'])
    def payment_qr(self, request, pk=None):
        """PNG QR code with bank transfer details for this invoice."""
        invoice = self.get_object()
        try:
            _, png = PaymentQRGenerator.generate_for_invoice(invoice)
        except MissingBankDetailsError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        response = HttpResponse(png, content_type='image/png')
        response['Content-Disposition'] = f'inline; filename="{invoice.invoice_number}.png"'
        return response

    @extend_schema(responses={(200, 'application/pdf'): OpenApiTypes.BINARY})
    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        """Printable PDF of this invoice."""
        invoice = self.get_object()
        response = HttpResponse(InvoicePDFRenderer.render(invoice), content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{invoice.invoice_number}.pdf"'
        return response

    @extend_schema(responses={200: NextInvoiceNumberSerializer})
    @action(detail=False, methods=['get'], url_path='preview-number')
    def preview_number(self, request):
        """Number the next invoice will get."""
        number = preview_invoice_number(account=self.get_account())
        return Response({'invoice_number': number})


@extend_schema(
    methods=['GET'],
    responses={200: InvoiceSettingsSerializer},
    tags=['invoices'],
)
@extend_schema(
    methods=['PUT', 'PATCH'],
    request=InvoiceSettingsSerializer,
    responses={200: InvoiceSettingsSerializer},
    tags=['invoices'],
)
@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def invoice_settings(request):
    """Business details and numbering for the active account's invoices."""
    account = resolve_request_account(request)
    settings_obj = get_invoice_settings(account=account)

    if request.method == 'GET':
        return Response(InvoiceSettingsSerializer(settings_obj).data)

    serializer = InvoiceSettingsSerializer(
        settings_obj,
        data=request.data,
        partial=request.method == 'PATCH'
    )
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@extend_schema(
    responses={200: PublicInvoiceSerializer},
    tags=['invoices'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def public_invoice(request, share_token):
    """Read-only invoice for anyone holding the share link."""
    invoice = get_object_or_404(
        Invoice.objects.select_related('client', 'account').prefetch_related('items'),
        share_token=share_token,
    )
    return Response(PublicInvoiceSerializer(invoice).data)
