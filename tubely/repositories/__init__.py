from tubely.repositories.videos import VideoRepository

__all__ = ["VideoRepository"]
