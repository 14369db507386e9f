"""Session factory using Factory Pattern."""
import requests
import aiohttp
from requests.adapters import HTTPAdapter, Retry
from typing import Optional


class SessionFactory:
    """Factory for creating HTTP sessions.
    
    Sessions are created per upload call and closed when it ends. Retries
    inside the transport are disabled; the uploader's own retry strategy
    decides when to try again.
    """
    
    @staticmethod
    def create_sync_session(user_agent: str, verify_ssl: bool = True) -> requests.Session:
        """Creates a synchronous HTTP session without transport retries."""
        session = requests.Session()
        retries = Retry(total=0, read=False)
        session.mount('http://', HTTPAdapter(max_retries=retries))
        session.mount('https://', HTTPAdapter(max_retries=retries))
        session.headers['User-Agent'] = user_agent
        session.verify = verify_ssl
        return session
    
    @staticmethod
    async def create_async_session(
        user_agent: str,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        verify_ssl: bool = True
    ) -> aiohttp.ClientSession:
        """Creates an asynchronous HTTP session."""
        kwargs = {}
        if timeout is not None:
            kwargs['timeout'] = timeout
        return aiohttp.ClientSession(
            headers={'User-Agent': user_agent},
            connector=aiohttp.TCPConnector(ssl=verify_ssl),
            **kwargs
        )
