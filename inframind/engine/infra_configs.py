"""
Infrastructure Config Templates

Renders the three configuration snippets attached to a report:
an NGINX rate-limit policy, Docker Compose resource limits and a
Kubernetes Deployment. Every numeric knob comes from a lookup table
keyed by risk level.
"""

import re
from dataclasses import dataclass

from inframind.models.health_run import HealthMetrics
from inframind.models.report import GeneratedConfigs, RiskLevel
from inframind.models.service import Service


@dataclass(frozen=True)
class ResourceProfile:
    """Sizing for one risk level."""
    nginx_rate: str
    nginx_burst: int
    docker_cpu_limit: str
    docker_cpu_reservation: str
    docker_memory_limit: str
    docker_memory_reservation: str
    k8s_replicas: int
    k8s_cpu_limit: str
    k8s_cpu_request: str
    k8s_memory_limit: str
    k8s_memory_request: str


RESOURCE_PROFILES: dict[RiskLevel, ResourceProfile] = {
    RiskLevel.HIGH: ResourceProfile(
        nginx_rate="10r/s",
        nginx_burst=20,
        docker_cpu_limit="1.0",
        docker_cpu_reservation="0.5",
        docker_memory_limit="1g",
        docker_memory_reservation="512m",
        k8s_replicas=3,
        k8s_cpu_limit="1000m",
        k8s_cpu_request="500m",
        k8s_memory_limit="1Gi",
        k8s_memory_request="512Mi",
    ),
    RiskLevel.MEDIUM: ResourceProfile(
        nginx_rate="20r/s",
        nginx_burst=40,
        docker_cpu_limit="0.5",
        docker_cpu_reservation="0.25",
        docker_memory_limit="512m",
        docker_memory_reservation="256m",
        k8s_replicas=2,
        k8s_cpu_limit="500m",
        k8s_cpu_request="250m",
        k8s_memory_limit="512Mi",
        k8s_memory_request="256Mi",
    ),
    RiskLevel.LOW: ResourceProfile(
        nginx_rate="50r/s",
        nginx_burst=100,
        docker_cpu_limit="0.25",
        docker_cpu_reservation="0.125",
        docker_memory_limit="256m",
        docker_memory_reservation="128m",
        k8s_replicas=1,
        k8s_cpu_limit="250m",
        k8s_cpu_request="125m",
        k8s_memory_limit="256Mi",
        k8s_memory_request="128Mi",
    ),
}

LIVENESS_INITIAL_DELAY_S = 30
READINESS_INITIAL_DELAY_S = 5


def resource_name(service: Service) -> str:
    """Lower-case the name and replace anything outside [a-z0-9] with '-'."""
    return re.sub(r"[^a-z0-9]", "-", service.name.lower())


def render_nginx_config(service: Service, profile: ResourceProfile) -> str:
    zone = f"{service.name}_rate_limit"
    burst_zone = f"{service.name}_burst"
    return f"""# NGINX Rate Limiting Configuration
# Add to your nginx.conf or site configuration

http {{
    # Define rate limiting zones
    limit_req_zone $binary_remote_addr zone={zone}:10m rate={profile.nginx_rate};
    limit_req_zone $binary_remote_addr zone={burst_zone}:10m rate=100r/s;

    server {{
        location {service.health_path} {{
            # Apply rate limiting
            limit_req zone={zone} burst={profile.nginx_burst} nodelay;
            limit_req zone={burst_zone} burst=200 nodelay;

            # Return 429 with custom message
            limit_req_status 429;

            # Proxy to your service
            proxy_pass {service.base_url};
            proxy_set_header Host $host;
            proxy_set_header X-Real-IP $remote_addr;
            proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        }}
    }}
}}"""


def render_docker_config(service: Service, profile: ResourceProfile) -> str:
    return f"""# Docker Compose Resource Configuration
# Add to your docker-compose.yml

version: '3.8'
services:
  {resource_name(service)}:
    image: your-app-image
    deploy:
      resources:
        limits:
          cpus: '{profile.docker_cpu_limit}'
          memory: {profile.docker_memory_limit}
        reservations:
          cpus: '{profile.docker_cpu_reservation}'
          memory: {profile.docker_memory_reservation}
    environment:
      - NODE_ENV={service.env.value}
      - MAX_CONNECTIONS=100
      - TIMEOUT_MS={service.expected_latency_max_ms}
    healthcheck:
      test: ["CMD", "curl", "-f", "{service.health_url}"]
      interval: 30s
      timeout: 10s
      retries: 3
      start_period: 40s"""


def render_k8s_config(service: Service, profile: ResourceProfile) -> str:
    name = resource_name(service)
    return f"""# Kubernetes Deployment Configuration
# Apply with: kubectl apply -f deployment.yaml

apiVersion: apps/v1
kind: Deployment
metadata:
  name: {name}
  labels:
    app: {name}
    env: {service.env.value}
spec:
  replicas: {profile.k8s_replicas}
  selector:
    matchLabels:
      app: {name}
  template:
    metadata:
      labels:
        app: {name}
    spec:
      containers:
      - name: app
        image: your-app-image
        ports:
        - containerPort: 3000
        resources:
          requests:
            memory: "{profile.k8s_memory_request}"
            cpu: "{profile.k8s_cpu_request}"
          limits:
            memory: "{profile.k8s_memory_limit}"
            cpu: "{profile.k8s_cpu_limit}"
        livenessProbe:
          httpGet:
            path: {service.health_path}
            port: 3000
          initialDelaySeconds: {LIVENESS_INITIAL_DELAY_S}
          periodSeconds: 10
          timeoutSeconds: 5
          failureThreshold: 3
        readinessProbe:
          httpGet:
            path: {service.health_path}
            port: 3000
          initialDelaySeconds: {READINESS_INITIAL_DELAY_S}
          periodSeconds: 5
          timeoutSeconds: 3
          failureThreshold: 3
        env:
        - name: NODE_ENV
          value: "{service.env.value}"
        - name: MAX_CONNECTIONS
          value: "100\""""


def generate_infra_configs(
    metrics: HealthMetrics,
    service: Service,
    risk_level: RiskLevel,
) -> GeneratedConfigs:
    """
    Render all configs for a risk level.

    The NGINX policy is omitted when the burst already drew a 429,
    since rate limiting is evidently in place.
    """
    profile = RESOURCE_PROFILES[risk_level]
    nginx = None
    if metrics.count_for("429") == 0:
        nginx = render_nginx_config(service, profile)

    return GeneratedConfigs(
        nginx_rate_limit_config=nginx,
        docker_resource_config=render_docker_config(service, profile),
        k8s_resources_config=render_k8s_config(service, profile),
    )
