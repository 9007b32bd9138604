from .wallet import Transaction, TransactionType, WalletRecord, WalletSnapshot, WalletState
from .session import SessionRequest, SessionResponse
from .health import HealthCheckResponse
