from django.urls import path

from . import views


app_name = 'transactions'
urlpatterns = [
    path('', views.TransactionSearch.as_view(), name='search'),
    path('market/', views.MarketSnapshot.as_view(), name='market'),
    path('<str:tx_hash>/', views.TransactionDetail.as_view(), name='detail'),
    path('<str:tx_hash>/state/', views.StateChanges.as_view(), name='state_changes'),
]
