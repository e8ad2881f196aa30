"""Shared fixtures for the Route 53 zone comparison tests."""

import logging

import boto3
import pytest
from botocore.stub import Stubber


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers main() attached to captured streams"""
    yield
    logging.getLogger("route53_zone_compare").handlers.clear()


@pytest.fixture
def aws_env(monkeypatch, tmp_path):
    """Isolate boto3 from the developer's real AWS configuration"""
    config_file = tmp_path / "aws_config"
    credentials_file = tmp_path / "aws_credentials"
    config_file.write_text("")
    credentials_file.write_text("")

    monkeypatch.setenv("AWS_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(credentials_file))
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)
    return tmp_path


@pytest.fixture
def make_client(aws_env):
    """Factory for Route 53 clients with an active Stubber"""
    stubbers = []

    def factory():
        client = boto3.client(
            "route53",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        stubber = Stubber(client)
        stubber.activate()
        stubbers.append(stubber)
        return client, stubber

    yield factory

    for stubber in stubbers:
        stubber.deactivate()


@pytest.fixture
def route53_stub(make_client):
    """A single stubbed Route 53 client and its Stubber"""
    return make_client()


def hosted_zones_page(*zones, next_marker=None):
    """ListHostedZones response for (zone_id, zone_name) pairs"""
    response = {
        "HostedZones": [
            {"Id": zone_id, "Name": name, "CallerReference": f"ref-{name}"}
            for zone_id, name in zones
        ],
        "Marker": "",
        "IsTruncated": next_marker is not None,
        "MaxItems": "100",
    }
    if next_marker is not None:
        response["NextMarker"] = next_marker
    return response


def record_sets_page(records, next_name=None, next_type=None, next_identifier=None):
    """ListResourceRecordSets response for raw API record dicts"""
    response = {
        "ResourceRecordSets": list(records),
        "IsTruncated": next_name is not None,
        "MaxItems": "300",
    }
    if next_name is not None:
        response["NextRecordName"] = next_name
    if next_type is not None:
        response["NextRecordType"] = next_type
    if next_identifier is not None:
        response["NextRecordIdentifier"] = next_identifier
    return response


@pytest.fixture
def zones_page():
    return hosted_zones_page


@pytest.fixture
def records_page():
    return record_sets_page
