from tubely.db.models.video import Video

__all__ = ["Video"]
