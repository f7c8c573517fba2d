"""
Link auto-discovery.

Builds device links from the existing inventory with a simple topology
heuristic: routers sit above generic devices, which sit above access points.

    - Each site's "core" is its highest-tier device (lowest id on ties).
    - Every other device of a site is linked to that site's core.
    - Every site core is linked to the core of the hub site, the first site
      in registry order.

Pairs that are already linked, in either direction, are never duplicated.
"""

import logging
from collections import defaultdict

from django.db import transaction

from .models import (
    DEFAULT_LINK_BANDWIDTH_MBPS,
    Device,
    DeviceLink,
    DeviceType,
    LinkType,
    Site,
)

logger = logging.getLogger(__name__)

TYPE_TIERS = {
    DeviceType.MIKROTIK: 0,
    DeviceType.GENERIC: 1,
    DeviceType.UNIFI: 2,
}


def _tier(device):
    return TYPE_TIERS.get(device.type, TYPE_TIERS[DeviceType.GENERIC])


def core_device(devices):
    return min(devices, key=lambda d: (_tier(d), d.id))


def plan_links(site_names, devices, existing_pairs=()):
    """
    Return the (source, target) device pairs auto-discovery would create.

    `site_names` is the registry order, `existing_pairs` an iterable of
    (device_id, device_id) tuples that are already linked.
    """
    by_site = defaultdict(list)
    for device in devices:
        by_site[device.site].append(device)

    ordered_sites = [name for name in site_names if by_site.get(name)]
    # Devices whose site is not registered still get a place, after the rest
    ordered_sites += sorted(set(by_site) - set(ordered_sites))

    seen = {frozenset(pair) for pair in existing_pairs}
    planned = []

    def _add(source, target):
        key = frozenset((source.id, target.id))
        if source.id == target.id or key in seen:
            return
        seen.add(key)
        planned.append((source, target))

    cores = {}
    for name in ordered_sites:
        members = sorted(by_site[name], key=lambda d: d.id)
        core = core_device(members)
        cores[name] = core
        for device in members:
            if device is not core:
                _add(core, device)

    if ordered_sites:
        hub = cores[ordered_sites[0]]
        for name in ordered_sites[1:]:
            _add(hub, cores[name])

    return planned


def auto_discover():
    """
    Create the links planned by `plan_links` in one bulk insert.

    Returns the list of created DeviceLink objects.
    """
    with transaction.atomic():
        devices = list(Device.objects.order_by("id"))
        site_names = list(Site.objects.values_list("name", flat=True))
        existing = DeviceLink.objects.values_list("source_device_id", "target_device_id")

        links = []
        for source, target in plan_links(site_names, devices, existing):
            link = DeviceLink(
                source_device=source,
                target_device=target,
                link_type=LinkType.AUTO,
                bandwidth_mbps=(
                    min(source.max_bandwidth, target.max_bandwidth)
                    or DEFAULT_LINK_BANDWIDTH_MBPS
                ),
            )
            link.refresh_status(save=False)
            links.append(link)

        created = DeviceLink.objects.bulk_create(links)

    logger.info("Auto-discovery created %d device link(s)", len(created))
    return created
