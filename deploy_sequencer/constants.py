# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Defaults, CLI tool names, and ingress controller constants."""

from __future__ import annotations

# -- Cluster context --
DEFAULT_NAMESPACE = "moodle"
DEFAULT_MINIKUBE_PROFILE = "minikube"
DEFAULT_MINIKUBE_DRIVER = "docker"

# -- AKS --
DEFAULT_RESOURCE_GROUP = "moodle-rg"
DEFAULT_AKS_CLUSTER_NAME = "moodle-aks"
DEFAULT_REGION = "westeurope"
DEFAULT_NODE_COUNT = 2
DEFAULT_NODE_SIZE = "Standard_B2s"

# -- Manifests, in apply order --
DEFAULT_MANIFESTS = [
    "0_secret.yaml",
    "1_moodle_pvc.yaml",
    "2_psql_db.yaml",
    "3_moodle.yaml",
]

# -- Readiness polling --
DEFAULT_POLL_ATTEMPTS = 30
DEFAULT_POLL_INTERVAL_SECONDS = 10
DEFAULT_INGRESS_TIMEOUT_SECONDS = 180

# -- ingress-nginx --
NS_INGRESS_NGINX = "ingress-nginx"
INGRESS_NGINX_SERVICE = "ingress-nginx-controller"
INGRESS_NGINX_CONTROLLER_SELECTOR = "app.kubernetes.io/component=controller"
INGRESS_NGINX_VERSION = "controller-v1.11.2"
INGRESS_NGINX_CLOUD_MANIFEST = (
    "https://raw.githubusercontent.com/kubernetes/ingress-nginx/"
    f"{INGRESS_NGINX_VERSION}/deploy/static/provider/cloud/deploy.yaml"
)
MINIKUBE_INGRESS_ADDON = "ingress"
DEFAULT_APP_INGRESS = "moodle-ingress"

# -- Required tools per target --
TOOLS_MINIKUBE = ["minikube", "kubectl"]
TOOLS_AKS = ["az", "kubectl"]

# -- Command timeouts (seconds) --
KUBECTL_TIMEOUT = 60
AZ_TIMEOUT = 1800

# kubectl stderr markers for a resource that does not exist
NOT_FOUND_MARKERS = ("NotFound", "not found")
# az stderr markers for a resource that does not exist
AZ_NOT_FOUND_MARKERS = ("ResourceNotFound", "ResourceGroupNotFound", "was not found")
