from browser_pilot.controller.service import Controller

__all__ = ['Controller']
