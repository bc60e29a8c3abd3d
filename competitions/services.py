from competitions.models import Competition


def get_competition(competition_id):
    """Return the competition or None."""
    return Competition.objects.filter(pk=competition_id).first()
