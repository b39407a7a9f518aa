from django.urls import path

from .views import (
    ExpenditureListCreateView,
    ExpenditureDetailView,
    ExpenditureCategoryListView,
)

app_name = 'expenses'

urlpatterns = [
    path('', ExpenditureListCreateView.as_view(), name='expenditure-list'),
    path('categories/', ExpenditureCategoryListView.as_view(), name='expenditure-categories'),
    path('<uuid:pk>/', ExpenditureDetailView.as_view(), name='expenditure-detail'),
]
