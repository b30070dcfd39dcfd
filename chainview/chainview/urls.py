from django.urls import include, path


urlpatterns = [
    path('', include('main.urls')),
    path('transaction/', include('transactions.urls')),
    path('history/', include('history.urls')),
]
