"""
Printable invoice PDFs.

The layout mirrors the public invoice page: business details, bill-to
block, line items, totals, notes and terms. When the account has bank
details the payment QR code and transfer instructions close the page.
"""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .calculations import due_status_text
from .invoice_management import get_invoice_settings
from .payment_qr import PaymentQRGenerator


def _money(amount, currency):
    return f"{currency} {amount:,.2f}"


def _quantity(value):
    return f"{value:f}".rstrip('0').rstrip('.')


def _address_lines(party):
    locality = ", ".join(part for part in [party.city, party.state, party.postal_code] if part)
    lines = [party.address, locality, party.country]
    if party.tax_id:
        lines.append(f"Tax ID: {party.tax_id}")
    return [line for line in lines if line]


def _block(lines):
    return "<br/>".join(escape(line) for line in lines)


class InvoicePDFRenderer:
    """Render an invoice as PDF bytes."""

    @staticmethod
    def build_story(invoice, invoice_settings):
        styles = getSampleStyleSheet()
        currency = invoice.account.currency
        business_name = invoice_settings.business_name or invoice.account.name

        seller = [business_name] + _address_lines(invoice_settings)
        seller += [value for value in [invoice_settings.email, invoice_settings.phone] if value]
        client = invoice.client
        buyer = [client.name] + _address_lines(client)
        buyer += [value for value in [client.email, client.phone] if value]

        header = Table(
            [[
                Paragraph(_block(seller), styles['Normal']),
                Paragraph(
                    _block([
                        f"Invoice {invoice.invoice_number}",
                        f"Date: {invoice.invoice_date:%d %b %Y}",
                        f"Due: {invoice.due_date:%d %b %Y}",
                        due_status_text(invoice.due_date, status=invoice.status),
                    ]),
                    styles['Normal'],
                ),
            ]],
            colWidths=[3.6 * inch, 3.2 * inch],
        )
        header.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))

        item_rows = [['Description', 'Qty', 'Unit price', 'Amount']]
        for item in invoice.items.all():
            item_rows.append([
                Paragraph(escape(item.description), styles['BodyText']),
                _quantity(item.quantity),
                _money(item.unit_price, currency),
                _money(item.amount, currency),
            ])
        items = Table(item_rows, colWidths=[3.4 * inch, 0.7 * inch, 1.35 * inch, 1.35 * inch], repeatRows=1)
        items.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))

        totals = Table(
            [
                ['Subtotal', _money(invoice.subtotal, currency)],
                [f"Tax ({invoice.tax_rate}%)", _money(invoice.tax_amount, currency)],
                ['Total due', _money(invoice.total, currency)],
            ],
            colWidths=[1.5 * inch, 1.5 * inch],
            hAlign='RIGHT',
        )
        totals.setStyle(TableStyle([
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, 2), (-1, 2), 'Helvetica-Bold'),
            ('LINEABOVE', (0, 2), (-1, 2), 0.5, colors.black),
        ]))

        story = [
            Paragraph('INVOICE', styles['Title']),
            header,
            Spacer(1, 18),
            Paragraph('Bill to', styles['Heading4']),
            Paragraph(_block(buyer), styles['Normal']),
            Spacer(1, 18),
            items,
            Spacer(1, 12),
            totals,
        ]

        for heading, text in (('Notes', invoice.notes), ('Terms', invoice.terms)):
            if text:
                story += [
                    Spacer(1, 12),
                    Paragraph(heading, styles['Heading4']),
                    Paragraph(_block(text.splitlines()), styles['Normal']),
                ]

        if invoice_settings.has_bank_details:
            payload, png = PaymentQRGenerator.generate_for_invoice(invoice)
            story += [
                Spacer(1, 18),
                Paragraph('How to pay', styles['Heading4']),
                Table(
                    [[
                        Paragraph(_block(payload.splitlines()), styles['Normal']),
                        Image(BytesIO(png), width=1.4 * inch, height=1.4 * inch),
                    ]],
                    colWidths=[4.6 * inch, 1.6 * inch],
                    hAlign='LEFT',
                ),
            ]
        return story

    @staticmethod
    def render(invoice):
        """
        PDF bytes for ``invoice``.

        Args:
            invoice (Invoice): Invoice with its client and items.

        Returns:
            bytes: The PDF document.
        """
        invoice_settings = get_invoice_settings(account=invoice.account)
        output = BytesIO()
        doc = SimpleDocTemplate(
            output,
            pagesize=A4,
            leftMargin=36,
            rightMargin=36,
            topMargin=36,
            bottomMargin=36,
            title=f"Invoice {invoice.invoice_number}",
        )
        doc.build(InvoicePDFRenderer.build_story(invoice, invoice_settings))
        return output.getvalue()
