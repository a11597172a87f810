"""End-to-end UI regression and bulk provisioning suite for Integration Studio."""
