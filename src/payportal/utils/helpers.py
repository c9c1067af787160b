from decimal import Decimal


def format_inr(amount):
    amount = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    return "₹{:,.2f}".format(amount)


def breakdown_display(breakdown):
    return {
        "principal": format_inr(breakdown.principal),
        "fee": format_inr(breakdown.fee),
        "gst": format_inr(breakdown.gst),
        "total_debit": format_inr(breakdown.total_debit),
        "net_credit": format_inr(breakdown.net_credit),
    }
