from django.urls import path
from . import views


app_name = "cash_management"

urlpatterns = [
    path("summary/", views.cash_summary, name="cash_summary"),
    path("banks/", views.banks, name="banks"),
    path("transactions/", views.transactions, name="transactions"),
    path("payables/", views.payables, name="payables"),
    path("payables/<int:pk>/", views.payable_detail, name="payable_detail"),
    path("receivables/", views.receivables, name="receivables"),
    path("receivables/<int:pk>/", views.receivable_detail, name="receivable_detail"),
]
