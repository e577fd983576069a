"""
Kubernetes client for deployment rollouts.
"""
import logging
from typing import List, Optional
from kubernetes import client, config
from kubernetes.client.rest import ApiException

logger = logging.getLogger(__name__)


class KubeClient:
    """Kubernetes client used to find and update deployments."""

    def __init__(
        self,
        in_cluster: bool = True,
        master_url: str = "",
        ca_file: str = "",
        cert_file: str = "",
        key_file: str = "",
        skip_ssl_verification: bool = True,
        context: Optional[str] = None,
    ):
        """
        Initialize Kubernetes client.

        Args:
            in_cluster: Use the pod service account (default: True)
            master_url: API server URL for explicit certificate authentication
            ca_file: CA certificate file
            cert_file: Client certificate file
            key_file: Client private key file
            skip_ssl_verification: Do not verify the API server certificate
            context: Kubeconfig context name, used when neither in-cluster nor
                master_url is configured
        """
        self.in_cluster = in_cluster
        self.master_url = master_url

        try:
            api_client = None
            if in_cluster:
                config.load_incluster_config()
            elif master_url:
                configuration = client.Configuration()
                configuration.host = master_url
                configuration.cert_file = cert_file or None
                configuration.key_file = key_file or None
                configuration.ssl_ca_cert = ca_file or None
                configuration.verify_ssl = not skip_ssl_verification
                api_client = client.ApiClient(configuration)
            else:
                if context:
                    config.load_kube_config(context=context)
                else:
                    config.load_kube_config()

            self.v1 = client.CoreV1Api(api_client)
            self.apps_v1 = client.AppsV1Api(api_client)
            logger.info(f"✅ Kubernetes client initialized (in_cluster={in_cluster}, host={master_url or 'default'})")

        except Exception as e:
            logger.error(f"❌ Failed to initialize Kubernetes client: {e}")
            raise

    def list_namespaces(self) -> List[str]:
        """
        Get all namespace names.

        Returns:
            Namespace names, empty if the API call failed
        """
        try:
            namespaces = self.v1.list_namespace()
            return [ns.metadata.name for ns in namespaces.items]

        except ApiException as e:
            logger.error(f"Failed to list namespaces: {e.status} {e.reason}")
            return []
        except Exception as e:
            logger.error(f"Failed to list namespaces: {e}")
            return []

    def list_deployments(self, namespace: str) -> list:
        """
        Get deployments in a namespace.

        Args:
            namespace: Kubernetes namespace

        Returns:
            List of V1Deployment objects, empty if the API call failed
        """
        try:
            deployments = self.apps_v1.list_namespaced_deployment(namespace=namespace)
            return list(deployments.items)

        except ApiException as e:
            logger.error(f"Failed to list deployments in namespace {namespace}: {e.status} {e.reason}")
            return []
        except Exception as e:
            logger.error(f"Failed to list deployments in namespace {namespace}: {e}")
            return []

    def update_deployment(self, deployment) -> bool:
        """
        Replace a deployment with an updated definition.

        Args:
            deployment: V1Deployment carrying the new container images

        Returns:
            True when the API server accepted the update
        """
        name = deployment.metadata.name
        namespace = deployment.metadata.namespace
        try:
            self.apps_v1.replace_namespaced_deployment(
                name=name,
                namespace=namespace,
                body=deployment
            )
            logger.info(f"✅ Deployed {namespace}/{name}")
            return True

        except ApiException as e:
            logger.error(f"❌ Failed to update deployment {namespace}/{name}: {e.status} {e.reason}")
            return False
        except Exception as e:
            logger.error(f"❌ Failed to update deployment {namespace}/{name}: {e}")
            return False
