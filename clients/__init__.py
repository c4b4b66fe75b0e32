# Infrastructure clients: snapshot storage and email delivery
from clients.valkey_client import ValkeyClient
from clients.email_client import EmailGatewayClient, EmailGatewayError
