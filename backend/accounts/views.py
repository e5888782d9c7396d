from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response


def _error(detail: str, status_code: int):
    """Consistent error payload shape across API: {'detail': ...}."""
    return Response({'detail': detail}, status=status_code)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login endpoint that returns a token and user role
    """
    username = request.data.get('username')
    password = request.data.get('password')

    if not username or not password:
        return _error('Username and password required', status.HTTP_400_BAD_REQUEST)

    user = authenticate(username=username, password=password)
    if not user:
        return _error('Invalid credentials', status.HTTP_401_UNAUTHORIZED)

    token, _ = Token.objects.get_or_create(user=user)

    return Response({
        'token': token.key,
        'role': user.role,
        'username': user.username
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    user = request.user
    return Response({'id': user.pk, 'username': user.username, 'role': user.role})
