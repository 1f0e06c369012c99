"""
Module: metrics.py
Description: CloudWatch custom metrics publishing.

Publishes relay metrics to CloudWatch for monitoring immediate
deliveries, rate-limit queuing, and retry queue outcomes.

Key Components:
- MetricsClient: CloudWatch metrics client
- put_metric(): Publish individual metrics
- Graceful error handling for metrics failures

Dependencies: boto3, typing, logger
"""

from typing import Optional

import boto3

from turn_relay.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsClient:
    """
    CloudWatch metrics client.

    When disabled, put_metric() only logs at debug level so local
    development and tests never reach AWS.
    """

    def __init__(
        self,
        namespace: str = "TurnRelay",
        enabled: bool = True,
        region_name: Optional[str] = None
    ):
        """
        Initialize metrics client.

        Args:
            namespace: CloudWatch metrics namespace
            enabled: Whether metrics are sent to CloudWatch
            region_name: AWS region of the CloudWatch endpoint
        """
        self.namespace = namespace
        self.enabled = enabled
        self.cloudwatch = (
            boto3.client('cloudwatch', region_name=region_name) if enabled else None
        )

        logger.info(
            "Metrics client initialized",
            namespace=namespace,
            enabled=enabled
        )

    def put_metric(
        self,
        metric_name: str,
        value: float = 1.0,
        unit: str = 'Count',
        dimensions: Optional[dict] = None
    ) -> None:
        """
        Publish a metric to CloudWatch.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit (Count, Seconds, etc.)
            dimensions: Optional metric dimensions
        """
        if not self.enabled:
            logger.debug(
                "Metrics disabled, skipping metric",
                metric_name=metric_name,
                value=value
            )
            return

        try:
            metric_data = {
                'MetricName': metric_name,
                'Value': value,
                'Unit': unit
            }

            if dimensions:
                metric_data['Dimensions'] = [
                    {'Name': k, 'Value': v}
                    for k, v in dimensions.items()
                ]

            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=[metric_data]
            )

            logger.debug(
                "Metric published to CloudWatch",
                metric_name=metric_name,
                value=value,
                unit=unit,
                dimensions=dimensions,
                namespace=self.namespace
            )

        except Exception as e:
            # Don't fail request if metrics fail
            logger.warning(
                "Failed to publish metric",
                metric_name=metric_name,
                value=value,
                error=str(e),
                namespace=self.namespace
            )
