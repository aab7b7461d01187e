"""Indexed access to the node inventory."""

from __future__ import annotations

import threading

from xops.config import Configuration
from xops.models import Host, Identity, Node
from xops.openssh import OpenSSHParser


class Provider:
    """Queries and manages a :class:`Configuration`, with a lookup index.

    Nodes can be found by ID, node alias, host address, host alias and the
    ``user@address`` / ``user@address:port`` forms.
    """

    def __init__(self, config: Configuration, openssh: OpenSSHParser | None = None) -> None:
        self._config = config
        self._index: dict[str, str] = {}
        self._lock = threading.RLock()
        self.openssh = openssh if openssh is not None else OpenSSHParser()
        for node_id in list(config.nodes):
            self._index_node(node_id)

    def _index_node(self, node_id: str) -> None:
        node = self.get_node(node_id)
        if node is None:
            return
        with self._lock:
            index = self._index
            index[node_id] = node_id
            for alias in filter(None, node.alias):
                index[alias] = node_id

            identity = self.get_identity(node_id)
            host = self.get_host(node_id)
            if identity is None or host is None:
                return

            address, port, user = host.address, host.port, identity.user
            index[address] = node_id
            if user:
                index[f"{user}@{address}"] = node_id
                index[f"{user}@{address}:{port}"] = node_id
                for alias in filter(None, node.alias):
                    index[f"{user}@{alias}"] = node_id
                    index[f"{user}@{alias}:{port}"] = node_id

            for alias in filter(None, host.alias):
                index[alias] = node_id
                if user:
                    index[f"{user}@{alias}"] = node_id
                    index[f"{user}@{alias}:{port}"] = node_id

    def find(self, value: str) -> str | None:
        """Return the node ID matching the user's input, or None."""
        return self._index.get(value)

    def find_alias(self, alias: str) -> str | None:
        """Return the node ID already using ``alias``, or None."""
        if not alias:
            return None
        return self._index.get(alias)

    def get_node(self, node_id: str) -> Node | None:
        return self._config.nodes.get(node_id)

    def get_host(self, node_id: str) -> Host | None:
        node = self._config.nodes.get(node_id)
        if node is None:
            return None
        return self._config.hosts.get(node.host_ref)

    def get_identity(self, node_id: str) -> Identity | None:
        node = self._config.nodes.get(node_id)
        if node is None:
            return None
        return self._config.identities.get(node.identity_ref)

    def add_node(self, node_id: str, node: Node) -> None:
        with self._lock:
            self._config.nodes[node_id] = node
            self._index_node(node_id)

    def add_host(self, host_id: str, host: Host) -> None:
        with self._lock:
            self._config.hosts[host_id] = host

    def add_identity(self, identity_id: str, identity: Identity) -> None:
        with self._lock:
            self._config.identities[identity_id] = identity

    def delete_node(self, node_id: str) -> None:
        """Remove a node, its index entries and any host/identity no longer used."""
        with self._lock:
            node = self._config.nodes.pop(node_id, None)
            if node is None:
                return

            self._index = {k: v for k, v in self._index.items() if v != node_id}

            remaining = self._config.nodes.values()
            host_used = any(n.host_ref == node.host_ref for n in remaining)
            identity_used = any(n.identity_ref == node.identity_ref for n in remaining)

            if not host_used and node.host_ref:
                self._config.hosts.pop(node.host_ref, None)
            if not identity_used and node.identity_ref:
                self._config.identities.pop(node.identity_ref, None)

    def list_nodes(self) -> dict[str, Node]:
        return dict(self._config.nodes)

    def get_nodes_by_tag(self, tag: str) -> dict[str, Node]:
        return {
            node_id: node
            for node_id, node in self._config.nodes.items()
            if tag in node.tags
        }

    def list_identities(self) -> dict[str, Identity]:
        return dict(self._config.identities)

    def delete_identity(self, name: str) -> None:
        with self._lock:
            self._config.identities.pop(name, None)

    def get_config(self) -> Configuration:
        return self._config