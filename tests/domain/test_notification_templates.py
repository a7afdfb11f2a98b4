"""Tests for notification message rendering."""

from shop.notifications.templates import (
    LowStockAlertTemplate,
    NewOrderTemplate,
    PaymentReceiptTemplate,
    PromotionTemplate,
    SupportForwardTemplate,
    SupportReplyTemplate,
)


class TestTemplates:
    def test_payment_receipt(self):
        text = PaymentReceiptTemplate.render({"order_id": "ORD-1", "total": 59.9})
        assert "Paiement confirmé" in text
        assert "ORD-1" in text
        assert "59.90€" in text

    def test_new_order_lists_lines(self):
        text = NewOrderTemplate.render(
            {
                "customer_id": "42",
                "order_id": "ORD-1",
                "total": 329.98,
                "lines": [
                    {"title": "T-shirt Premium", "quantity": 1},
                    {"title": "Montre Connectée", "quantity": 1},
                ],
            }
        )
        assert "NOUVELLE COMMANDE" in text
        assert "• T-shirt Premium × 1" in text
        assert "• Montre Connectée × 1" in text
        assert "329.98€" in text

    def test_low_stock_alert(self):
        text = LowStockAlertTemplate.render({"name": "MacBook Air M2", "remaining_stock": 3})
        assert text == "⚠️ ALERTE STOCK: MacBook Air M2 - Stock restant: 3"

    def test_support_forward_names_sender_and_reply_command(self):
        text = SupportForwardTemplate.render({"customer_id": "42", "text": "Où est ma commande?", "display_name": "Ana"})
        assert "Ana" in text
        assert "Où est ma commande?" in text
        assert "/reply 42" in text

    def test_support_forward_falls_back_to_id(self):
        text = SupportForwardTemplate.render({"customer_id": "42", "text": "Bonjour"})
        assert "de 42" in text

    def test_reply_and_promotion(self):
        assert "Merci" in SupportReplyTemplate.render({"text": "Merci"})
        assert "Promotion spéciale" in PromotionTemplate.render({"text": "-20%"})
