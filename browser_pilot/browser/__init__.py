from browser_pilot.browser.active_page import ActivePageResolver
from browser_pilot.browser.profile import BrowserProfile
from browser_pilot.browser.session import BrowserSession

__all__ = ['ActivePageResolver', 'BrowserProfile', 'BrowserSession']
