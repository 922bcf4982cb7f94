"""
Archived URL cache.

Stores the timestamp -> archived URL mapping produced by the CDX lookup as a
single pretty-printed JSON file. The file's existence alone decides whether
the lookup runs again.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Union

from .validators import get_validator


DEFAULT_CACHE_NAME = "wayback_urls.json"


class UrlCache:
    def __init__(self, path: Union[str, Path] = DEFAULT_CACHE_NAME):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)

    def exists(self) -> bool:
        return self.path.exists()

    def write(self, urls: Dict[str, str]) -> Path:
        """
        Write the mapping as indented JSON, creating parent directories.

        Returns:
            Path of the written file
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(urls, f, indent=2)
        self.logger.debug(f"Wrote {len(urls)} entries to {self.path}")
        return self.path

    def read(self) -> Dict[str, str]:
        """
        Load the mapping.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the content is not a JSON object of strings
        """
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}, got {type(data).__name__}")
        return {str(k): str(v) for k, v in data.items()}

    def archived_urls(self) -> List[str]:
        """Archived page URLs in file order."""
        urls = list(self.read().values())
        validator = get_validator()
        for url in urls:
            if not validator.is_wayback_url(url):
                self.logger.warning(f"Cached URL is not a Wayback Machine URL: {url}")
        return urls
