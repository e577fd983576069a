"""
Configuration settings for the image rollout webhook.
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    APP_NAME: str = Field(default="image-rollout-webhook", description="Application name")
    APP_ENV: str = Field(default="dev", description="Environment: dev|staging|prod")

    # HTTP Configuration
    HTTP_HOST: str = Field(default="0.0.0.0", description="Bind address")
    HTTP_PORT: int = Field(default=3000, description="Service port")

    # Kubernetes Configuration
    K8S_IN_CLUSTER: bool = Field(default=True, description="Use in-cluster service account")
    K8S_MASTER_URL: str = Field(default="", description="Kubernetes API server URL")
    K8S_SKIP_SSL_VERIFICATION: bool = Field(default=True, description="Skip API server certificate check")
    K8S_CA_FILE: str = Field(default="", description="CA certificate file")
    K8S_CERT_FILE: str = Field(default="", description="Client certificate file")
    K8S_KEY_FILE: str = Field(default="", description="Client private key file")
    K8S_CONTEXT: Optional[str] = Field(default=None, description="Kubeconfig context")

    # Registry Configuration
    REGISTRY_HOST: str = Field(default="", description="Registry hostname overriding the one in notifications")

    # Service Configuration
    LOG_LEVEL: str = Field(default="info", description="Log level: info|debug|warning")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
