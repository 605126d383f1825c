from django.urls import path

from . import views

urlpatterns = [
    path("site-evaluation/recompute/", views.site_evaluation_recompute, name="site-evaluation-recompute"),
    path("site-evaluation/prefill/<int:session_id>/", views.site_evaluation_prefill, name="site-evaluation-prefill"),
    path("site-evaluation/submit/", views.site_evaluation_submit, name="site-evaluation-submit"),
    path("mama-payments/", views.mama_payments, name="mama-payments"),
    path("mama-payments/export/", views.mama_payments_export, name="mama-payments-export"),
    path("janitor-payments/", views.janitor_payments, name="janitor-payments"),
    path("janitor-payments/export/", views.janitor_payments_export, name="janitor-payments-export"),
    path("store/", views.store_overview, name="store-overview"),
    path("store/export/", views.store_export, name="store-export"),
    path("store/collections/", views.store_collect, name="store-collect"),
    path("store/sort/", views.store_sort, name="store-sort"),
    path("store/sell/", views.store_sell, name="store-sell"),
    path("suppliers/collections/", views.supplier_collections, name="supplier-collections"),
    path("weekly-plan/", views.weekly_plan, name="weekly-plan"),
]
