"""Upstreams (GitHub, GitLab, Helm, AMI, EKS, dummy) that report a latest version."""