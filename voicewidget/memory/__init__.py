from .transcript import Message, Transcript

__all__ = ['Message', 'Transcript']
