from django import template

from main.utils import Formatter


register = template.Library()
formatter = Formatter()


@register.filter
def truncate_address(value):
    return formatter.address(value)


@register.filter
def relative_time(timestamp):
    return formatter.relative_time(timestamp)


@register.filter
def eth_amount(value, places=6):
    return formatter.amount(value, int(places))


@register.filter
def risk_level(risk_score):
    return formatter.risk_level(risk_score)
