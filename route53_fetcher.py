"""
Route 53 access: credential loading, hosted zone lookup and record set retrieval.

All calls are blocking and sequential. Any failure is raised to the caller
immediately; partial results are never returned.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from compare_errors import ConfigurationError, RetrievalError, ZoneNotFoundError
from record_diff import ResourceRecordSet

# Hard cap on ListResourceRecordSets pages (Route 53 returns up to 300 record sets per page)
DEFAULT_MAX_PAGES = 1000


def get_route53_client(profile: Optional[str] = None, logger: logging.Logger = None):
    """Create a Route 53 client from a shared-config profile.

    An empty profile uses boto3's default credential chain.
    """
    logger = logger or logging.getLogger('route53_zone_compare.fetcher')
    profile_label = profile or 'default credential chain'

    try:
        session = boto3.Session(profile_name=profile or None)
        if session.get_credentials() is None:
            raise ConfigurationError(f"No AWS credentials found for {profile_label}")
        client = session.client('route53')
    except ProfileNotFound as e:
        raise ConfigurationError(f"AWS profile '{profile}' could not be loaded: {e}") from e
    except BotoCoreError as e:
        raise ConfigurationError(f"Failed to load AWS configuration for {profile_label}: {e}") from e

    logger.debug(f"Created Route 53 client using {profile_label}")
    return client


@dataclass(frozen=True)
class RecordCursor:
    """Continuation point returned by a truncated ListResourceRecordSets page"""
    name: Optional[str] = None
    type: Optional[str] = None
    identifier: Optional[str] = None

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> 'RecordCursor':
        return cls(
            name=response.get('NextRecordName'),
            type=response.get('NextRecordType'),
            identifier=response.get('NextRecordIdentifier'),
        )

    def to_params(self) -> Dict[str, str]:
        params = {}
        if self.name is not None:
            params['StartRecordName'] = self.name
        if self.type is not None:
            params['StartRecordType'] = self.type
        if self.identifier is not None:
            params['StartRecordIdentifier'] = self.identifier
        return params


class Route53ZoneReader:
    """Reads hosted zones and their record sets from one Route 53 account"""

    def __init__(self, client, max_pages: int = DEFAULT_MAX_PAGES,
                 logger: logging.Logger = None):
        self.client = client
        self.max_pages = max_pages
        self.logger = logger or logging.getLogger('route53_zone_compare.fetcher')

    def list_hosted_zones(self) -> List[Dict[str, Any]]:
        """Return every hosted zone in the account"""
        zones = []
        try:
            paginator = self.client.get_paginator('list_hosted_zones')
            for page in paginator.paginate():
                zones.extend(page['HostedZones'])
        except (BotoCoreError, ClientError) as e:
            raise RetrievalError(f"Failed to list hosted zones: {e}") from e

        self.logger.debug(f"Found {len(zones)} hosted zones")
        return zones

    def resolve_zone_id(self, zone_name: str) -> str:
        """Return the id of the hosted zone named exactly ``zone_name``"""
        if not zone_name.endswith('.'):
            self.logger.warning(
                f"Zone name '{zone_name}' has no trailing dot; Route 53 zone names always end with '.'"
            )

        zones = self.list_hosted_zones()
        for zone in zones:
            if zone['Name'] == zone_name:
                self.logger.debug(f"Resolved zone {zone_name} to {zone['Id']}")
                return zone['Id']

        raise ZoneNotFoundError(zone_name, [zone['Name'] for zone in zones])

    def fetch_all_records(self, zone_id: str) -> List[ResourceRecordSet]:
        """Fetch every record set in a hosted zone, following continuation cursors"""
        records: List[ResourceRecordSet] = []
        cursor = RecordCursor()

        for page_number in range(1, self.max_pages + 1):
            params = {'HostedZoneId': zone_id}
            params.update(cursor.to_params())

            self.logger.debug(f"Requesting record page {page_number} for {zone_id}")
            try:
                response = self.client.list_resource_record_sets(**params)
            except (BotoCoreError, ClientError) as e:
                raise RetrievalError(f"Failed to list record sets for zone {zone_id}: {e}") from e

            records.extend(ResourceRecordSet.from_api(item) for item in response['ResourceRecordSets'])

            if not response.get('IsTruncated'):
                self.logger.debug(f"Fetched {len(records)} record sets in {page_number} pages")
                return records
            cursor = RecordCursor.from_response(response)

        raise RetrievalError(
            f"Record listing for zone {zone_id} did not finish within {self.max_pages} pages"
        )
