from datetime import timedelta

from .utils import window_instances


def schedule_kpis(document, instances, now):
    """
    Headline counts for the schedule pages.

    ``week`` and ``upcoming`` count the given instances starting between
    ``now`` and seven days or ``publicDaysAhead`` days ahead respectively.
    """
    horizon = now + timedelta(days=document.settings.public_days_ahead)
    return {
        'week': len(window_instances(instances, now, now + timedelta(days=7))),
        'upcoming': len(window_instances(instances, now, horizon)),
        'players': len(document.players),
        'trainings': len(document.trainings),
    }
