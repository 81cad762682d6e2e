"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
Seed accounts and the admin password live here and are handed to the
registry at startup; nothing is baked into the domain types.
"""

from pydantic import BaseModel
from pydantic_settings import BaseSettings
from typing import List, Literal


class SeedAccount(BaseModel):
    """Account loaded into the registry at startup"""
    account_id: str
    pin: str
    holder_name: str
    opening_balance: str  # Decimal as string


DEMO_ACCOUNTS = [
    SeedAccount(account_id="1234567890", pin="1234", holder_name="Shubham kumar", opening_balance="10000.00"),
    SeedAccount(account_id="0987654321", pin="4321", holder_name="Navneet parmar", opening_balance="15000.00"),
    SeedAccount(account_id="1111222233", pin="9999", holder_name="Sikandar", opening_balance="5000.00"),
]


class ATMConfig(BaseSettings):
    """ATM system configuration"""

    # Business rules
    max_failed_attempts: int = 3
    minimum_opening_deposit: str = "500.00"
    transfer_policy: Literal["atomic", "debit_only"] = "atomic"

    # Security configuration
    admin_password: str = "Skp123"
    pin_hash_scheme: Literal["scrypt", "plaintext"] = "scrypt"

    # Seed data (JSON list in ATM_SEED_ACCOUNTS)
    seed_accounts: List[SeedAccount] = DEMO_ACCOUNTS

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    class Config:
        env_prefix = "ATM_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = ATMConfig()


def get_config() -> ATMConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> ATMConfig:
    """Reload configuration from environment"""
    global config
    config = ATMConfig()
    return config
