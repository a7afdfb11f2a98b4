"""Message templates for customer and administrator notifications.

Each template renders a plain-text (Markdown-flavoured) message from a
context dict. Amounts are shown with two decimals and the euro sign.
"""


def _money(amount) -> str:
    return f"{float(amount):.2f}€"


class PaymentReceiptTemplate:
    """Sent to the customer once their payment is confirmed."""

    @staticmethod
    def render(context: dict) -> str:
        return (
            "✅ **Paiement confirmé!**\n\n"
            f"📦 Commande: {context['order_id']}\n"
            f"💰 Montant: {_money(context['total'])}\n\n"
            "🚚 Votre commande sera traitée dans les plus brefs délais."
        )


class NewOrderTemplate:
    """Sent to the administrator for every newly paid order."""

    @staticmethod
    def render(context: dict) -> str:
        details = "\n".join(f"• {line['title']} × {line['quantity']}" for line in context.get("lines", []))
        return (
            "🛎️ **NOUVELLE COMMANDE**\n\n"
            f"👤 Client: {context['customer_id']}\n"
            f"📦 Commande: {context['order_id']}\n"
            f"💰 Total: {_money(context['total'])}\n\n"
            f"📝 Détails:\n{details}"
        )


class LowStockAlertTemplate:
    @staticmethod
    def render(context: dict) -> str:
        return f"⚠️ ALERTE STOCK: {context['name']} - Stock restant: {context['remaining_stock']}"


class SupportForwardTemplate:
    """Relays a free-text customer message to the administrator."""

    @staticmethod
    def render(context: dict) -> str:
        sender = context.get("display_name") or context["customer_id"]
        return (
            f"💬 Nouveau message support de {sender}:\n\n"
            f"\"{context['text']}\"\n\n"
            f"Répondez avec /reply {context['customer_id']} votre_réponse"
        )


class SupportReplyTemplate:
    @staticmethod
    def render(context: dict) -> str:
        return f"💬 **Réponse du support:**\n\n{context['text']}"


class PromotionTemplate:
    @staticmethod
    def render(context: dict) -> str:
        return f"📢 **Promotion spéciale:**\n\n{context['text']}"
