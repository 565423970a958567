from celery import shared_task
import logging

from giftlist.services.challenges import ChallengeStore

logger = logging.getLogger(__name__)


@shared_task
def purge_expired_challenges():
    """
    Periodic sweep of challenges left behind by abandoned ceremonies.

    The challenge store already sweeps on every issue/consume; this keeps the
    table small on quiet deployments too.
    """
    count = ChallengeStore().purge_expired()
    logger.info(f"Purged {count} expired challenges")
    return count
