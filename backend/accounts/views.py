from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from . import services
from .serializers import RegisterSerializer, LoginSerializer, UserSerializer


class RegisterView(APIView):
    """
    Register a new user (passenger or driver)

    POST Body:
    {
        "username": "john_doe",
        "password": "password123",
        "role": "ROLE_USER"  // or "ROLE_DRIVER"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = services.register_user(**serializer.validated_data)

        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


class LoginView(APIView):
    """
    Login with username and password to get an access token

    POST Body:
    {
        "username": "john_doe",
        "password": "password123"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        # Malformed credentials fail like wrong ones: 401, same message
        credentials = serializer.validated_data if serializer.is_valid() else {}

        token = services.login_user(
            credentials.get("username"),
            credentials.get("password"),
        )

        return Response({"token": token}, status=status.HTTP_200_OK)
