"""
discovery_sdk.tier2_discovery.datacenter
─────────────────────────────────────────
Where is this instance running? A single tagged type rather than a class
per environment:

  - Amazon  carries a metadata mapping (wire name → value) that a
            collaborator populates out-of-band from the cloud metadata
            service; this package only reads it
  - MyOwn   generic / on-prem, no metadata capability

Metadata is keyed by wire name ("public-hostname"); address resolution
orders name keys by token ("publicHostname"). MetadataKey maps between the two.
"""
from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from enum import Enum

from discovery_sdk.tier0_core.errors import MetadataUnavailableError


class MetadataKey(str, Enum):
    """Cloud host metadata fields. The value is the metadata wire name."""

    AMI_ID = "ami-id"
    AMI_LAUNCH_INDEX = "ami-launch-index"
    AMI_MANIFEST_PATH = "ami-manifest-path"
    INSTANCE_ID = "instance-id"
    INSTANCE_TYPE = "instance-type"
    LOCAL_IPV4 = "local-ipv4"
    LOCAL_HOSTNAME = "local-hostname"
    AVAILABILITY_ZONE = "availability-zone"
    PUBLIC_HOSTNAME = "public-hostname"
    PUBLIC_IPV4 = "public-ipv4"
    MAC = "mac"
    VPC_ID = "vpc-id"
    ACCOUNT_ID = "accountId"

    @property
    def token(self) -> str:
        """Name used in address resolution orders, e.g. "publicHostname"."""
        return _TOKENS[self]

    @classmethod
    def from_token(cls, token: str) -> "MetadataKey | None":
        """Look up a key by its order token. Exact match; None when unknown."""
        return _BY_TOKEN.get(token)


_TOKENS: dict[MetadataKey, str] = {
    MetadataKey.AMI_ID: "amiId",
    MetadataKey.AMI_LAUNCH_INDEX: "amiLaunchIndex",
    MetadataKey.AMI_MANIFEST_PATH: "amiManifestPath",
    MetadataKey.INSTANCE_ID: "instanceId",
    MetadataKey.INSTANCE_TYPE: "instanceType",
    MetadataKey.LOCAL_IPV4: "localIpv4",
    MetadataKey.LOCAL_HOSTNAME: "localHostname",
    MetadataKey.AVAILABILITY_ZONE: "availabilityZone",
    MetadataKey.PUBLIC_HOSTNAME: "publicHostname",
    MetadataKey.PUBLIC_IPV4: "publicIpv4",
    MetadataKey.MAC: "mac",
    MetadataKey.VPC_ID: "vpcId",
    MetadataKey.ACCOUNT_ID: "accountId",
}

_BY_TOKEN: dict[str, MetadataKey] = {token: key for key, token in _TOKENS.items()}


class DataCenterName(str, Enum):
    AMAZON = "Amazon"
    MY_OWN = "MyOwn"


@dataclass(frozen=True, eq=False)
class DataCenterInfo:
    name: DataCenterName
    metadata: MutableMapping[str, str] | None = field(default=None, repr=False)

    @classmethod
    def amazon(cls, metadata: MutableMapping[str, str] | None = None) -> "DataCenterInfo":
        """
        Cloud-hosted variant. The mapping is kept by reference so the
        collaborator that fetches metadata can keep it current in place.
        """
        return cls(DataCenterName.AMAZON, metadata if metadata is not None else {})

    @classmethod
    def generic(cls) -> "DataCenterInfo":
        return cls(DataCenterName.MY_OWN)

    def has_metadata_capability(self) -> bool:
        return self.name is DataCenterName.AMAZON and self.metadata is not None

    def get_metadata(self) -> MutableMapping[str, str]:
        if not self.has_metadata_capability():
            raise MetadataUnavailableError(
                f"Data center {self.name.value!r} has no host metadata",
                data_center=self.name.value,
            )
        return self.metadata  # type: ignore[return-value]

    def get(self, key: MetadataKey) -> str | None:
        """Value of one metadata field; raises MetadataUnavailableError without capability."""
        return self.get_metadata().get(key.value)


__all__ = ["MetadataKey", "DataCenterName", "DataCenterInfo"]
