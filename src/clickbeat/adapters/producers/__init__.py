"""Non-HTTP log sources implementing ProducerPort."""

import logging

from clickbeat.adapters.producers.file_tail import FileTailProducer
from clickbeat.adapters.producers.pump import IngestPump
from clickbeat.adapters.producers.queues import KafkaSource, RedisSource
from clickbeat.adapters.producers.tcp import TCPLineProducer
from clickbeat.core.config import InputsConfig
from clickbeat.core.ports import ProducerPort

logger = logging.getLogger(__name__)


def build_producers(inputs: InputsConfig, host: str = "0.0.0.0") -> list[ProducerPort]:
    """Create the producers enabled in the configuration.

    Enabled inputs with incomplete settings, a missing client library, or a
    client that fails to start are skipped with a warning.

    Args:
        inputs: Producer settings.
        host: Interface the TCP listener binds to.
    """
    producers: list[ProducerPort] = []

    kafka = inputs.kafka
    if kafka.enabled:
        if not kafka.brokers or not kafka.topics:
            logger.warning("Kafka input needs brokers and topics, skipping")
        else:
            try:
                producers.append(KafkaSource.from_config(kafka))
            except ImportError:
                logger.warning("Kafka input needs kafka-python installed, skipping")
            except Exception as error:
                logger.warning("cannot start Kafka input, skipping: %s", error)

    redis = inputs.redis
    if redis.enabled:
        if not redis.address or not redis.key:
            logger.warning("Redis input needs address and key, skipping")
        else:
            try:
                producers.append(RedisSource.from_config(redis))
            except ImportError:
                logger.warning("Redis input needs redis installed, skipping")
            except Exception as error:
                logger.warning("cannot start Redis input, skipping: %s", error)

    file = inputs.file
    if file.enabled:
        if not file.paths:
            logger.warning("file input has no paths, skipping")
        else:
            producers.append(FileTailProducer(file.paths, follow=file.follow))

    tcp = inputs.tcp
    if tcp.enabled:
        if not tcp.port:
            logger.warning("TCP input has no port, skipping")
        else:
            try:
                producers.append(TCPLineProducer(host, tcp.port, tcp.format))
            except OSError as error:
                logger.warning(
                    "cannot listen on TCP port %d, skipping: %s", tcp.port, error
                )

    return producers


__all__ = [
    "FileTailProducer",
    "IngestPump",
    "KafkaSource",
    "RedisSource",
    "TCPLineProducer",
    "build_producers",
]
