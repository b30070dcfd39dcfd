from django.urls import path

from . import views


app_name = 'history'
urlpatterns = [
    path('<str:address>/', views.HistoryTable.as_view(), name='table'),
]
