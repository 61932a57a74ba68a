"""
Labor Modules - project, budget and comparison services over the record store.

Each subpackage follows the same layout: ``models`` (frozen DTOs),
``orm`` (SQLAlchemy persistence, where the concept is stored) and
``service`` (transaction-owning orchestration).
"""
