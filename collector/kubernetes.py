# -*- coding: utf-8 -*-
"""
Kubernetes 集群采集器

功能：
- 调用 GET /v2/kubernetes/clusters（自动翻页）
- 集群记录中包含节点池，不需要额外调用
"""

from collector.base import MetricDescriptor, ResourceCollector, flag, label, slug, to_float


class KubernetesCollector(ResourceCollector):
    """Kubernetes 集群采集器"""

    name = 'kubernetes'

    cluster_up = MetricDescriptor(
        'digitalocean_kubernetes_cluster_up',
        "If 1 the kubernetes cluster is up and running, 0 otherwise",
        ('id', 'name', 'region', 'version'),
    )
    nodepool_nodes = MetricDescriptor(
        'digitalocean_kubernetes_nodepool_nodes',
        "The number of nodes in the kubernetes node pool",
        ('cluster_id', 'cluster_name', 'id', 'name', 'size'),
    )

    descriptors = (cluster_up, nodepool_nodes)

    def collect(self):
        clusters = self._fetch('kubernetes clusters', self.client.list_kubernetes_clusters)
        if clusters is None:
            return

        cluster_up = self.cluster_up.family()
        nodepool_nodes = self.nodepool_nodes.family()

        for cluster in clusters:
            cluster_id = label(cluster.get('id'))
            cluster_name = label(cluster.get('name'))
            state = (cluster.get('status') or {}).get('state')

            cluster_up.add_metric(
                [cluster_id, cluster_name, slug(cluster.get('region')), label(cluster.get('version'))],
                flag(state == 'running'),
            )

            for pool in cluster.get('node_pools') or []:
                nodepool_nodes.add_metric(
                    [cluster_id, cluster_name, label(pool.get('id')), label(pool.get('name')), label(pool.get('size'))],
                    to_float(pool.get('count')),
                )

        yield cluster_up
        yield nodepool_nodes
