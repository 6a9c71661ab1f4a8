"""
URL validation for remote image downloads.

Image sources come from document content, so every remote fetch is checked
against private/reserved address ranges before a request is made.
"""

import ipaddress
import re
import socket
from typing import List, Optional, Set, Tuple, Union
from urllib.parse import urlparse

import requests

USER_AGENT = 'Docsgen/1.0.0 (Static Site Generator)'


class URLValidator:
    """Rejects URLs that would make the generator talk to internal hosts."""

    ALLOWED_SCHEMES: Set[str] = {'http', 'https'}

    BLOCKED_IP_RANGES: List[str] = [
        '0.0.0.0/8',
        '10.0.0.0/8',
        '100.64.0.0/10',
        '127.0.0.0/8',
        '169.254.0.0/16',
        '172.16.0.0/12',
        '192.0.0.0/24',
        '192.0.2.0/24',
        '192.168.0.0/16',
        '198.18.0.0/15',
        '198.51.100.0/24',
        '203.0.113.0/24',
        '224.0.0.0/4',
        '240.0.0.0/4',
        '255.255.255.255/32',
        '::1/128',
        '::/128',
        '::ffff:0:0/96',
        'fe80::/10',
        'fc00::/7',
        'ff00::/8',
    ]

    BLOCKED_HOSTNAMES: Set[str] = {
        'localhost',
        'localhost.localdomain',
        'ip6-localhost',
        'ip6-loopback',
        'broadcasthost',
        'metadata.google.internal',
    }

    SUSPICIOUS_PATTERNS = [
        r'%2f%2f',
        r'%5c%5c',
        r'\.\./',
        r'%2e%2e%2f',
    ]

    def __init__(self, resolve_hosts: bool = True):
        """
        Args:
            resolve_hosts: Resolve hostnames and check the resulting addresses.
                Literal IP hosts are always checked.
        """
        self.resolve_hosts = resolve_hosts
        self._blocked_networks = [ipaddress.ip_network(cidr) for cidr in self.BLOCKED_IP_RANGES]

    def validate_url(self, url: str) -> Tuple[bool, str]:
        """
        Validate a URL for SSRF safety.

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            parsed = urlparse(url)
        except ValueError as e:
            return False, f"URL validation error: {e}"

        if not parsed.scheme or not parsed.netloc:
            return False, "Invalid URL format"
        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES:
            return False, f"Unsupported URL scheme: {parsed.scheme}"
        if '@' in parsed.netloc:
            return False, "URL contains user info"

        hostname = (parsed.hostname or '').lower()
        if not hostname:
            return False, "Invalid hostname in URL"
        if hostname in self.BLOCKED_HOSTNAMES:
            return False, f"Blocked hostname: {hostname}"

        url_lower = url.lower()
        for pattern in self.SUSPICIOUS_PATTERNS:
            if re.search(pattern, url_lower):
                return False, "URL contains suspicious patterns"

        literal_ip = self._literal_ip(hostname)
        if literal_ip is not None:
            if not self._is_ip_allowed(literal_ip):
                return False, f"Blocked IP address: {literal_ip}"
            return True, "URL is valid"

        if self.resolve_hosts:
            try:
                for ip_str in self._resolve_hostname(hostname):
                    if not self._is_ip_allowed(ip_str):
                        return False, f"Blocked IP address: {ip_str}"
            except socket.gaierror:
                return False, f"Cannot resolve hostname: {hostname}"

        return True, "URL is valid"

    def _literal_ip(self, hostname: str) -> Optional[str]:
        try:
            return str(ipaddress.ip_address(hostname))
        except ValueError:
            return None

    def _resolve_hostname(self, hostname: str) -> List[str]:
        addr_info = socket.getaddrinfo(hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM)
        return list({info[4][0] for info in addr_info})

    def _is_ip_allowed(self, ip_str: str) -> bool:
        try:
            ip = ipaddress.ip_address(ip_str)
        except ValueError:
            return False
        return not any(ip in network for network in self._blocked_networks)


class SafeRequestor:
    """HTTP GET wrapper that validates URLs before making requests."""

    def __init__(self, validator: URLValidator = None, session=None):
        self.validator = validator or URLValidator()
        self.session = session or requests.Session()

    def safe_get(self, url: str, **kwargs) -> Tuple[bool, Union[requests.Response, str]]:
        """
        Make a GET request after URL validation.

        Returns:
            Tuple of (success, response_or_error_message). Non-2xx responses
            count as failures.
        """
        is_valid, error_msg = self.validator.validate_url(url)
        if not is_valid:
            return False, f"URL validation failed: {error_msg}"

        kwargs.setdefault('timeout', 30)
        kwargs.setdefault('allow_redirects', True)
        headers = kwargs.setdefault('headers', {})
        headers.setdefault('User-Agent', USER_AGENT)

        try:
            response = self.session.get(url, **kwargs)
            response.raise_for_status()
            return True, response
        except requests.exceptions.RequestException as e:
            return False, f"HTTP request failed: {e}"
