import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from backend.transactions.models import Transaction
from backend.transactions.utils import record_event
from .models import Category
from .serializers import CategorySerializer

logger = logging.getLogger('backend.catalog')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.all()
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            with transaction.atomic():
                category = serializer.save()
                record_event(
                    Transaction.TYPE_CREATE_CATEGORY, request=request,
                    item_name=category.name, item_category='Category',
                    reason=f'Category {category.name} created',
                )
            logger.info(f"User {request.user.username} created category '{category.name}'")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        name = category.name
        with transaction.atomic():
            record_event(
                Transaction.TYPE_DELETE_CATEGORY, request=request,
                item_name=name, item_category='Category',
                reason=f'Category {name} deleted',
            )
            category.delete()
        logger.info(f"User {request.user.username} deleted category '{name}'")
        return Response({'message': 'Category removed'})
