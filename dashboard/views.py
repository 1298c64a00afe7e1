import io
import logging
from datetime import timedelta

import openpyxl
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from django.db.models import DecimalField, ExpressionWrapper, F, Sum
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from authentication.models import RestaurantSettings
from customers.models import Customer
from inventory.models import Product
from orders.models import Order, OrderItem, RestaurantTable
from orders.serializers import OrderReadSerializer
from . import reports

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5
CHART_TYPES = ('daily_sales', 'category_revenue', 'top_products')


def get_order_rows():
    return Order.objects.exclude(status=Order.CANCELLED).values('created_at', 'total_amount', 'status')


def get_sold_items():
    return OrderItem.objects.exclude(order__status=Order.CANCELLED)


def get_category_rows():
    return get_sold_items().values(
        'product__category__name', 'product__category__color'
    ).annotate(
        revenue=Sum(ExpressionWrapper(
            F('unit_price') * F('quantity'), output_field=DecimalField(max_digits=12, decimal_places=2)
        ))
    ).order_by('-revenue')


def get_product_rows():
    return get_sold_items().values('product__name').annotate(
        total_quantity=Sum('quantity')
    ).order_by('-total_quantity', 'product__name')


def get_daily_sales(days=7):
    end_date = timezone.localdate()
    start = timezone.now() - timedelta(days=days + 1)
    rows = Order.objects.filter(status=Order.PAID, created_at__gte=start).values(
        'created_at', 'total_amount', 'status'
    )
    return reports.daily_sales(rows, end_date, days=days)


@extend_schema(summary="Dashboard Statistics")
@api_view(['GET'])
def dashboard_stats(request):
    stats = reports.dashboard_stats(
        list(RestaurantTable.objects.values('status')),
        list(get_order_rows()),
        Customer.objects.count(),
        Product.objects.count(),
        timezone.localdate(),
    )
    return Response(stats)


@extend_schema(summary="Latest Orders", responses={200: OrderReadSerializer(many=True)})
@api_view(['GET'])
def recent_orders(request):
    orders = Order.objects.select_related('table', 'customer', 'staff').prefetch_related(
        'items__product'
    ).order_by('-created_at', '-id')[:RECENT_ORDERS_LIMIT]
    return Response(OrderReadSerializer(orders, many=True).data)


@extend_schema(
    summary="Chart Data",
    description="chart_type is one of daily_sales, category_revenue, top_products",
    parameters=[OpenApiParameter('limit', int, description="Number of products for top_products")],
)
@api_view(['GET'])
def dashboard_chart_data(request, chart_type):
    """API endpoint for chart data"""
    if chart_type == 'daily_sales':
        buckets = get_daily_sales()
        return Response({
            'labels': [bucket['label'] for bucket in buckets],
            'data': buckets,
            'summary': reports.sales_summary(buckets),
        })
    elif chart_type == 'category_revenue':
        return Response({'data': reports.category_revenue(get_category_rows())})
    elif chart_type == 'top_products':
        try:
            limit = int(request.query_params.get('limit', 5))
        except ValueError:
            return Response({'limit': ['Must be an integer.']}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'data': reports.top_products(get_product_rows(), limit=max(limit, 1))})
    else:
        return Response(
            {'chart_type': [f"Invalid chart type. Expected one of: {', '.join(CHART_TYPES)}"]},
            status=status.HTTP_400_BAD_REQUEST
        )


# =============== EXPORTS ===============

@extend_schema(
    summary="Export Sales Report",
    parameters=[OpenApiParameter('format', str, enum=['excel', 'pdf'])],
)
@api_view(['GET'])
def export_sales_report(request):
    format_type = request.query_params.get('format', 'excel')
    if format_type not in ('excel', 'pdf'):
        return Response({'format': ['Expected excel or pdf.']}, status=status.HTTP_400_BAD_REQUEST)

    buckets = get_daily_sales()
    restaurant = RestaurantSettings.load()
    logger.info("Exporting %s sales report for %s", format_type, request.user.username)
    if format_type == 'excel':
        return generate_sales_excel(buckets, restaurant)
    return generate_sales_pdf(buckets, restaurant)


def generate_sales_excel(buckets, restaurant):
    """Excel sales report for the trailing window"""
    start_date, end_date = buckets[0]['date'], buckets[-1]['date']
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Sales"

    header_font = Font(bold=True, size=12)
    title_font = Font(bold=True, size=16)

    ws['A1'] = f"{restaurant.restaurant_name} - Sales Report"
    ws['A1'].font = title_font
    ws['A2'] = f"Period: {start_date} to {end_date}"
    ws.merge_cells('A1:C1')
    ws.merge_cells('A2:C2')

    headers = ['Date', 'Orders', f"Sales ({restaurant.currency})"]
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=4, column=col, value=header)
        cell.font = header_font

    row = 5
    for bucket in buckets:
        ws.cell(row=row, column=1, value=bucket['date'])
        ws.cell(row=row, column=2, value=bucket['orders'])
        ws.cell(row=row, column=3, value=float(bucket['sales']))
        row += 1

    summary = reports.sales_summary(buckets)
    row += 1
    ws.cell(row=row, column=1, value="TOTALS:").font = header_font
    ws.cell(row=row, column=2, value=summary['total_orders']).font = header_font
    ws.cell(row=row, column=3, value=float(summary['total_sales'])).font = header_font
    ws.cell(row=row + 1, column=1, value="Average basket:")
    ws.cell(row=row + 1, column=3, value=float(summary['average_basket']))

    for column_letter in ('A', 'B', 'C'):
        ws.column_dimensions[column_letter].width = 20

    response = HttpResponse(content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    response['Content-Disposition'] = f'attachment; filename="sales_{start_date}_{end_date}.xlsx"'
    wb.save(response)
    return response


def generate_sales_pdf(buckets, restaurant):
    """PDF sales report for the trailing window"""
    start_date, end_date = buckets[0]['date'], buckets[-1]['date']
    symbol = restaurant.currency_symbol
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4)
    story = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=18,
        spaceAfter=30,
        alignment=1
    )
    story.append(Paragraph(f"{restaurant.restaurant_name} - Sales Report", title_style))
    story.append(Paragraph(f"Period: {start_date} to {end_date}", styles['Heading2']))
    story.append(Spacer(1, 20))

    data = [['Date', 'Orders', 'Sales']]
    for bucket in buckets:
        data.append([bucket['date'], str(bucket['orders']), f"{bucket['sales']:.2f} {symbol}"])

    summary = reports.sales_summary(buckets)
    data.append(['TOTAL', str(summary['total_orders']), f"{summary['total_sales']:.2f} {symbol}"])

    table = Table(data)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -2), colors.beige),
        ('BACKGROUND', (0, -1), (-1, -1), colors.lightgrey),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 1, colors.black)
    ]))
    story.append(table)
    story.append(Spacer(1, 12))
    story.append(Paragraph(f"Average basket: {summary['average_basket']:.2f} {symbol}", styles['Normal']))
    doc.build(story)

    buffer.seek(0)
    response = HttpResponse(buffer, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="sales_{start_date}_{end_date}.pdf"'
    return response
