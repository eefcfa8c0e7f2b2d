from django.urls import path
from . import views

app_name = 'results'

urlpatterns = [
    path('term-result/', views.term_result, name='term_result'),
    path('report-card/', views.report_card, name='report_card'),
]
